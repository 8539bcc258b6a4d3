"""Data models shared by the locator and the importers."""

from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ImportRequest(BaseModel):
    """One import statement as handed over by the compiler."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    prev: str = Field(..., description="Path of the requesting file (may be a non-file marker like 'stdin')")


class ModuleRecord(BaseModel):
    """Module metadata as returned by a module registry.

    Attributes:
        name: Module name (``widgets`` or ``@scope/widgets``)
        stylesheet_dir: Declared stylesheet directory, if any
        main_path: Module entry file, if any
        metadata_file: File the metadata was read from (e.g. package.json)
    """

    model_config = ConfigDict(frozen=True)

    name: str
    stylesheet_dir: Path | None = None
    main_path: Path | None = None
    metadata_file: Path | None = None


class ResolvedImport(BaseModel):
    """Contents and canonical path of a resolved import.

    ``already_imported`` is set on repeats when import-once is enabled; the
    contents are still the file's contents.
    """

    model_config = ConfigDict(frozen=True)

    contents: str
    file: str
    already_imported: bool = False
