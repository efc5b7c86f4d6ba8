"""
Error Catalogue Loader

Loads the code/data-type lookup tables from error_catalog.yaml.
"""

import yaml
from pathlib import Path
from typing import Dict, List, Optional
from functools import lru_cache
from pydantic import BaseModel, Field


class QuickFixTemplate(BaseModel):
    """Pre-authored remediation for one error code"""

    fix_id: str
    title: str
    description: str
    auto_applicable: bool = False
    estimated_time: str = "unknown"
    instructions: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class ErrorCatalog(BaseModel):
    """Lookup tables used to enrich validation errors"""

    documentation_base_url: str
    documentation_anchors: Dict[str, str] = Field(default_factory=dict)
    retryable_codes: List[str] = Field(default_factory=list)
    code_suggestions: Dict[str, List[str]] = Field(default_factory=dict)
    data_type_suggestions: Dict[str, List[str]] = Field(default_factory=dict)
    field_suggestions: Dict[str, str] = Field(default_factory=dict)
    quick_fixes: Dict[str, QuickFixTemplate] = Field(default_factory=dict)

    class Config:
        frozen = True

    @classmethod
    def load_from_file(cls, catalog_path: Path) -> "ErrorCatalog":
        """Load the catalogue from a YAML file."""
        with open(catalog_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def documentation_link(self, error_code: str) -> str:
        anchor = self.documentation_anchors.get(error_code)
        if anchor is None:
            return self.documentation_base_url
        return f"{self.documentation_base_url}{anchor}"

    def is_retryable(self, error_code: str) -> bool:
        return error_code in self.retryable_codes

    def suggestions_for_code(self, error_code: str) -> List[str]:
        return list(self.code_suggestions.get(error_code, []))

    def suggestions_for_data_type(self, data_type: str) -> List[str]:
        return list(self.data_type_suggestions.get(data_type, []))

    def suggestions_for_field(self, field_path: Optional[str]) -> List[str]:
        if not field_path:
            return []
        return [
            suggestion
            for fragment, suggestion in self.field_suggestions.items()
            if fragment in field_path
        ]

    def quick_fix_for(self, error_code: str) -> Optional[QuickFixTemplate]:
        return self.quick_fixes.get(error_code)


@lru_cache(maxsize=1)
def get_error_catalog() -> ErrorCatalog:
    """
    Get the packaged error catalogue.

    Uses LRU cache so the YAML file is parsed once per process.

    Returns:
        ErrorCatalog instance
    """
    return ErrorCatalog.load_from_file(Path(__file__).parent / "error_catalog.yaml")
