# src/assets/models.py — v1
"""Asset domain models: AssetReference, ResolvedAsset, ResolutionFailure, ModuleRoot."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, model_validator


class AssetReference(BaseModel):
    """A parsed stylesheet reference.

    ``bare`` references are relative to the primary webroot and never carry a
    module name. ``module`` references are relative to a registered module
    root and always do.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["bare", "module"]
    raw_path: str
    module_name: str | None = None

    @model_validator(mode="after")
    def _check_variant(self) -> AssetReference:
        if self.kind == "module" and not self.module_name:
            raise ValueError("module references require a module_name")
        if self.kind == "bare" and self.module_name is not None:
            raise ValueError("bare references cannot carry a module_name")
        return self

    @classmethod
    def bare(cls, raw_path: str) -> AssetReference:
        return cls(kind="bare", raw_path=raw_path)

    @classmethod
    def qualified(cls, module_name: str, raw_path: str) -> AssetReference:
        return cls(kind="module", raw_path=raw_path, module_name=module_name)

    def __str__(self) -> str:
        if self.module_name:
            return f"{self.module_name}/{self.raw_path}"
        return self.raw_path


class ResolvedAsset(BaseModel):
    """A reference mapped onto the filesystem and its public URL base."""

    model_config = ConfigDict(frozen=True)

    absolute_path: Path
    public_base_url: str = ""
    reference: AssetReference


class ResolutionFailure(BaseModel):
    """Why a reference could not be resolved."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["file_not_found", "module_not_found"]
    message: str
    reference: AssetReference


class ModuleRoot(BaseModel):
    """A registered module: canonical name, asset root and URL prefix."""

    model_config = ConfigDict(frozen=True)

    name: str
    root: Path
    url_prefix: str
