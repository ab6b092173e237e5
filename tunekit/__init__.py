"""tunekit — resumable hyperparameter search over pluggable strategies.

The package is organised in layers:

* :mod:`tunekit.search` — candidates, history, the model supply buffer,
  tuning strategies, ranges and selection heuristics.
* :mod:`tunekit.runtime` — evaluation, concurrency backends, the search
  loop, finalisation and the :class:`TunedModel` front end.
* :mod:`tunekit.data`, :mod:`tunekit.models`, :mod:`tunekit.utils` —
  datasets, resampling plans, models and measures.
"""

__version__ = "0.1.0"
