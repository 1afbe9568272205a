import importlib
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any


def add_file_context(exc: BaseException, *paths: Path | str | None) -> None:
    """Name the label/image files in an error raised while colorizing them.

    :func:`labelkit.pipeline.process_files` calls this before re-raising, so
    a ``ShapeMismatchError`` from the aggregator reads
    ``"labels.tif, image.tif: Shape mismatch: ..."`` and carries a note
    listing both inputs. ``None`` paths are skipped.
    """

    path_strings = [str(Path(path)) for path in paths if path is not None]
    if not path_strings:
        return

    prefix = ", ".join(path_strings)
    if exc.args:
        first, *rest = exc.args
        if isinstance(first, str):
            if prefix not in first:
                exc.args = (f"{prefix}: {first}", *rest)
        else:
            exc.args = (f"{prefix}: {first!r}", *rest)
    else:
        exc.args = (f"Error while processing {prefix}",)

    exc.add_note(f"While processing file(s): {prefix}")


def make_lazy_getattr(
    module_globals: dict[str, Any],
    mapping: dict[str, tuple[str, str]],
    extras: Sequence[str] | None = None,
) -> tuple[Callable[[str], Any], Callable[[], list[str]], tuple[str, ...]]:
    """Build the module-level ``__getattr__``/``__dir__``/``__all__`` of ``labelkit``.

    ``import labelkit`` then costs nothing: ``labelkit.aggregate_by_label``
    imports :mod:`labelkit.stats` (and with it polars) only on first access
    and caches the function in the package namespace.
    """

    lazy_names = dict(mapping)
    extra_set = set(extras or ())
    module_name = module_globals.get("__name__", "<module>")

    def __getattr__(name: str) -> Any:
        if name not in lazy_names:
            raise AttributeError(f"module '{module_name}' has no attribute '{name}'")
        mod_name, attr = lazy_names[name]
        try:
            module = importlib.import_module(mod_name)
        except ImportError as e:
            raise AttributeError(
                f"{module_name}: failed to lazily import '{name}' from '{mod_name}': {e}"
            ) from e
        value = getattr(module, attr)
        module_globals[name] = value
        return value

    def __dir__() -> list[str]:
        return sorted(set(module_globals.keys()) | set(lazy_names.keys()) | extra_set)

    __all__ = tuple(sorted(set(lazy_names.keys()) | extra_set))

    return __getattr__, __dir__, __all__
