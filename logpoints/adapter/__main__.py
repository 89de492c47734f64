"""Log points DAP adapter: ``python -m logpoints.adapter``.

Same as ``python -m logpoints``; see :mod:`logpoints.adapter.main`.
"""

from logpoints.adapter.main import main

if __name__ == "__main__":
    main()
