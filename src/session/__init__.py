"""
Greeting generation orchestration: contact store, navigation, single and
batch generation, and the controller that owns the app state.
"""

from .batch import (
    BatchPlan,
    BatchState,
    ItemOutcome,
    Progress,
    plan_batch,
    run_batch,
    step,
)
from .config import AppConfig, configure_logging
from .controller import BATCH_COMPLETE_MESSAGE, AppController
from .generation import GenerationResult, generate_for_contact
from .importing import (
    MAX_IMAGE_BYTES,
    append_transcript,
    parse_names_text,
    revise_memories,
    read_names_from_image,
    transcribe_memo,
    validate_image,
)
from .navigation import Navigation, View, resolve, transition
from .state import AppState
from .store import ContactStore

__all__ = [
    "AppConfig",
    "AppController",
    "AppState",
    "BATCH_COMPLETE_MESSAGE",
    "BatchPlan",
    "BatchState",
    "ContactStore",
    "GenerationResult",
    "ItemOutcome",
    "MAX_IMAGE_BYTES",
    "Navigation",
    "Progress",
    "View",
    "append_transcript",
    "configure_logging",
    "generate_for_contact",
    "parse_names_text",
    "plan_batch",
    "read_names_from_image",
    "resolve",
    "revise_memories",
    "run_batch",
    "step",
    "transcribe_memo",
    "transition",
    "validate_image",
]
