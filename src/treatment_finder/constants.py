"""Treatment finder constants shared across the SDK.

These values are referenced by the scoring engine, the flow controller, and
the catalog store.  A few can be overridden via environment variables so that
deployments can tune the results page without code changes.
"""

import os

# Number of recommendations shown on the results page.
# Overridable via TREATMENT_FINDER_TOP_N env var.
DEFAULT_TOP_N = int(os.getenv("TREATMENT_FINDER_TOP_N", "4"))

# Treatment priority is divided by this before being added to the tag-match
# count, so a full 1-10 priority range never outweighs a single matched tag.
PRIORITY_SCALE = 10

# Selection modes a question can declare in questions.yaml.
SELECTION_SINGLE = "single"
SELECTION_MULTIPLE = "multiple"

# Source label attached to leads handed off after the quiz.
LEAD_SOURCE = os.getenv("LEAD_SOURCE", "treatment-quiz")

# Catalog version directory loaded when none is given explicitly.
DEFAULT_CATALOG_VERSION = "v1"
