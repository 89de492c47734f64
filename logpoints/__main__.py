"""Log points debug adapter: ``python -m logpoints``.

Starts the IDE-facing DAP adapter.  By default the adapter talks DAP over
stdin/stdout, which is how IDE frontends spawn debug adapters.  Use
``--port`` to listen on TCP instead (handy when debugging the adapter
itself)::

    python -m logpoints
    python -m logpoints --port 4711 --log-level DEBUG
"""

from logpoints.adapter.main import main

if __name__ == "__main__":
    main()
