"""logpoints - remote log points debug adapter for hosted web apps."""

from logpoints.adapter.main import main as _adapter_main

__all__ = ["__version__", "main"]
__version__ = "0.1.0"


def main() -> None:
	"""Entry point that mirrors :func:`logpoints.adapter.main.main`."""

	_adapter_main()
