"""
Output sink and class writer.

OutputStream wraps a binary stream the same way the generated runtime
``Stream/OutputStream`` does. ClassWriter maps models and built-in types to
file paths under the output directory and asks the language generator to
render them.
"""

import io
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Tuple, Union

from ...logging_config import get_logger
from .errors import FileSystemError
from .model import ClassModel

logger = get_logger(__name__)


class OutputStream:
    """Text writer over a binary stream."""

    def __init__(self, stream: BinaryIO, encoding: str = "utf-8"):
        self._stream = stream
        self.encoding = encoding

    @classmethod
    def streamed_to(cls, path: Union[str, Path]) -> "OutputStream":
        """Open ``path`` for writing, truncating it."""
        try:
            return cls(open(path, "wb"))
        except OSError as e:
            raise FileSystemError(f"Could not open {path} for writing: {e}") from e

    @classmethod
    def in_memory(cls) -> "OutputStream":
        return cls(io.BytesIO())

    def write(self, text: str) -> "OutputStream":
        self._stream.write(text.encode(self.encoding))
        return self

    def write_line(self, text: str = "", line_ending: str = "\n") -> "OutputStream":
        return self.write(f"{text}{line_ending}")

    def getvalue(self) -> str:
        """Contents written so far (in-memory streams only)."""
        if not isinstance(self._stream, io.BytesIO):
            raise TypeError("getvalue() is only available on in-memory streams")
        return self._stream.getvalue().decode(self.encoding)

    def close(self) -> None:
        if not isinstance(self._stream, io.BytesIO):
            self._stream.close()

    def __enter__(self) -> "OutputStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def ensure_directory(path: Path) -> Path:
    """
    Create ``path`` and its parents.

    An existing directory counts as success.

    Raises:
        FileSystemError: If the directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileSystemError(f"Could not create directory {path}: {e}") from e
    return path


class ClassWriter:
    """Writes rendered classes into ``<output>/<namespace>/<Class><ext>``."""

    def __init__(self, output_directory: Union[str, Path], generator):
        """
        Args:
            output_directory: Root of the generated tree
            generator: Language generator doing the rendering
        """
        self.output_directory = Path(output_directory)
        self.generator = generator
        self.written: Dict[Path, str] = {}

    def path_for(self, namespace: Tuple[str, ...], class_name: str) -> Path:
        file_name = f"{self.generator.class_identifier(class_name)}{self.generator.file_extension}"
        return self.output_directory.joinpath(*namespace, file_name)

    def _prepare_directory(self, namespace: Tuple[str, ...]) -> Path:
        directory = ensure_directory(self.output_directory.joinpath(*namespace))
        marker = self.generator.package_marker
        if marker:
            # every directory from the root down becomes a package
            current = self.output_directory
            packages = [current]
            for segment in namespace:
                current = current / segment
                packages.append(current)
            for package in packages:
                init_file = package / marker
                if not init_file.exists():
                    self._write_text(init_file, "")
        return directory

    def _write_text(self, path: Path, text: str) -> None:
        with OutputStream.streamed_to(path) as stream:
            stream.write(text)

    def _record(self, path: Path, kind: str) -> Path:
        self.written[path] = kind
        logger.debug(f"Wrote {kind} {path}")
        return path

    def write_class(self, model: ClassModel, kind: str = "class") -> Path:
        """Render ``model`` into its file, replacing any previous content."""
        model.validate()
        self._prepare_directory(model.namespace)
        path = self.path_for(model.namespace, model.class_name)
        with OutputStream.streamed_to(path) as stream:
            self.generator.emit(model, stream)
        return self._record(path, kind)

    def builtin_exists(self, name: str) -> bool:
        return self.path_for(self.generator.builtin_namespace, name).exists()

    def write_builtin(self, name: str) -> Optional[Path]:
        """
        Render a built-in type template into the built-in namespace.

        Returns:
            The written path, or None when the file already existed
        """
        path = self.path_for(self.generator.builtin_namespace, name)
        if self.builtin_exists(name):
            logger.debug(f"Built-in {name} already present at {path}")
            return None
        self._prepare_directory(self.generator.builtin_namespace)
        self._write_text(path, self.generator.render_builtin(name))
        return self._record(path, "builtin")

    def write_runtime_support(self) -> None:
        """Render the ValidationException and OutputStream classes."""
        for (namespace, name), source in self.generator.render_runtime().items():
            self._prepare_directory(namespace)
            path = self.path_for(namespace, name)
            self._write_text(path, source)
            self._record(path, "runtime")
