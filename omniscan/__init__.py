"""AI image scanning: food, vehicle damage, documents, and objects."""

from .categories import CATALOGUE, CategoryInfo, ScanCategory, build_prompt
from .config import (
    CameraConfig,
    ClaudeProviderConfig,
    GeminiProviderConfig,
    ProviderConfig,
    ScanConfig,
    load_config,
)
from .orchestrator import ScanFailed, ScanOrchestrator
from .parser import ParsedResult, ParseError, derive_summary, strip_fences
from .provider import AnalysisProvider, ProviderError, ScanRequest, create_provider
from .session import ScanInProgress, ScanRecord, ScanSession, ScanState, format_details

__all__ = [
    "ScanCategory",
    "CategoryInfo",
    "CATALOGUE",
    "build_prompt",
    "AnalysisProvider",
    "ScanRequest",
    "ProviderError",
    "create_provider",
    "ParsedResult",
    "ParseError",
    "derive_summary",
    "strip_fences",
    "ScanOrchestrator",
    "ScanFailed",
    "ScanSession",
    "ScanRecord",
    "ScanState",
    "ScanInProgress",
    "format_details",
    "ScanConfig",
    "ProviderConfig",
    "GeminiProviderConfig",
    "ClaudeProviderConfig",
    "CameraConfig",
    "load_config",
]
