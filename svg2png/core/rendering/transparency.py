"""
Transparency Converter
======================

Transparent SVG to PNG conversion delegated to an external ImageMagick process.
The document and the result are exchanged through a pair of temporary files
that are removed on every exit path, including task cancellation.
"""

import asyncio
import contextlib
import os
import tempfile
from pathlib import Path
from types import TracebackType
from typing import Any, List, Optional, Type, Union

from svg2png.config.logging import get_logger
from svg2png.config.settings import get_settings
from svg2png.core.errors import ConversionError, ConversionSpawnError
from svg2png.models.schemas import EncodedImage

logger = get_logger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
STDERR_TAIL_BYTES = 2000


class TemporaryArtifact:
    """
    Uniquely named input/output file pair scoped to one conversion.

    Both files are created on ``__enter__`` and unlinked on ``__exit__``
    whatever the outcome of the block.
    """

    def __init__(self, directory: Union[str, Path], prefix: str = "svg2png-"):
        self.directory = Path(directory)
        self.prefix = prefix
        self.input_path: Optional[Path] = None
        self.output_path: Optional[Path] = None

    def _create(self, suffix: str) -> Path:
        fd, name = tempfile.mkstemp(prefix=self.prefix, suffix=suffix, dir=self.directory)
        os.close(fd)
        return Path(name)

    def __enter__(self) -> "TemporaryArtifact":
        self.directory.mkdir(parents=True, exist_ok=True)
        try:
            self.input_path = self._create(".svg")
            self.output_path = self._create(".png")
        except BaseException:
            self.cleanup()
            raise
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Remove both files; missing files are ignored."""
        for path in (self.input_path, self.output_path):
            if path is not None:
                path.unlink(missing_ok=True)


def _read_if_present(path: Path) -> bytes:
    return path.read_bytes() if path.exists() else b""


class TransparencyConverter:
    """Converts SVG to a transparency-aware PNG with an external executable."""

    def __init__(
        self,
        executable: Optional[str] = None,
        temp_dir: Optional[Union[str, Path]] = None,
    ):
        settings = get_settings()
        self.executable = executable or settings.transparency_executable
        self.temp_dir = Path(temp_dir) if temp_dir is not None else settings.temp_path
        self.logger: Any = logger.bind(component="transparency_converter")

    def build_command(self, source: Path, destination: Path) -> List[str]:
        """Command line converting ``source`` to ``destination`` on a transparent background."""
        return [self.executable, "-background", "none", str(source), str(destination)]

    async def convert(self, document: bytes) -> EncodedImage:
        """
        Convert SVG bytes to a PNG with an alpha channel.

        Args:
            document: Raw SVG bytes

        Returns:
            EncodedImage read back from the process output file

        Raises:
            ConversionSpawnError: If the executable cannot be started
            ConversionError: If the process fails or leaves no PNG output
        """
        with TemporaryArtifact(self.temp_dir) as artifact:
            await asyncio.to_thread(artifact.input_path.write_bytes, document)

            await self._run(self.build_command(artifact.input_path, artifact.output_path))

            png_bytes = await asyncio.to_thread(_read_if_present, artifact.output_path)

        if not png_bytes:
            self.logger.error("Conversion produced no output", executable=self.executable)
            raise ConversionError("External conversion produced no output file")
        if not png_bytes.startswith(PNG_SIGNATURE):
            self.logger.error("Conversion output is not a PNG", executable=self.executable)
            raise ConversionError("External conversion output is not a PNG image")

        self.logger.debug("Transparent conversion complete", file_size=len(png_bytes))
        return EncodedImage(data=png_bytes)

    async def _run(self, command: List[str]) -> None:
        self.logger.debug("Starting external conversion", command=command)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.logger.error(
                "Failed to start conversion executable", executable=self.executable, error=str(e)
            )
            raise ConversionSpawnError(
                f"Failed to start conversion executable '{self.executable}': {e}",
                details={"executable": self.executable},
            )

        try:
            _, stderr = await process.communicate()
        finally:
            if process.returncode is None:
                self.logger.warning("Killing unfinished conversion process", pid=process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()

        if process.returncode != 0:
            message = stderr[-STDERR_TAIL_BYTES:].decode("utf-8", errors="replace").strip()
            self.logger.error(
                "Conversion process failed", returncode=process.returncode, stderr=message
            )
            raise ConversionError(
                f"External conversion exited with status {process.returncode}: {message}",
                details={"returncode": process.returncode},
            )
