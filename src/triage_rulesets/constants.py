"""Triage constants shared across the SDK.

These values are referenced by the matcher, engine, and ruleset store.
Several of them can be overridden via environment variables so that
deployments can tune the input gate or the presentation delays without
code changes.
"""

import os

# Minimum number of (stripped) characters before free text may be analysed.
# The UI disables the analyse action below this length.
# Overridable via TRIAGE_MIN_CHARS env var.
MIN_CHARS = int(os.getenv("TRIAGE_MIN_CHARS", "30"))

# Minimum whitespace-separated tokens for free text to count as well formed.
MIN_WORDS = 4

# Cosmetic delays (seconds) between submitting and showing a result.
# They simulate processing and perform no work; 0 disables them.
DEFAULT_SUBMIT_DELAY = float(os.getenv("TRIAGE_SUBMIT_DELAY", "1.2"))
DEFAULT_ANALYZE_DELAY = float(os.getenv("TRIAGE_ANALYZE_DELAY", "1.2"))

# User-facing guidance returned when free text fails the well-formedness gate.
INVALID_INPUT_MESSAGE = "We couldn’t understand your symptoms clearly."
INVALID_INPUT_HINT = (
    "Describe how you feel in plain words, for example "
    "\"I have a headache and fever since yesterday\". "
    "Avoid numbers and punctuation."
)

# Catalog filter value meaning "every category".
ALL_CATEGORIES = "All"

# Category assigned to assessments that do not declare one.
DEFAULT_CATEGORY = "General"
