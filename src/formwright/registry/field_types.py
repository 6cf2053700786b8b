"""Field type registry: the fixed catalog of semantic field kinds.

The registry is read-only and built once per process via
:func:`default_registry`; pipeline components receive it by reference.
Every ``GeneratedField.type`` must be a key of this catalog.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Iterator, Mapping, Optional


@dataclass(frozen=True)
class FieldTypeDescriptor:
    """Usage guidance for one field type."""

    category: str
    description: str
    best_for: tuple[str, ...] = ()
    signals: tuple[str, ...] = ()
    allows_multiple: bool = False
    optimal_when_option_count_above: Optional[int] = None
    is_input: bool = True
    is_choice: bool = False
    requires_options: bool = False


_PALETTE: dict[str, FieldTypeDescriptor] = {
    # ── Text ─────────────────────────────────────────────────────────
    "short-answer": FieldTypeDescriptor(
        category="Text",
        description="Single-line text input for brief responses",
        best_for=("names", "titles", "brief answers"),
        signals=("name", "title", "subject", "brief", "one word", "what is your", "enter your"),
    ),
    "long-answer": FieldTypeDescriptor(
        category="Text",
        description="Multi-line text area for detailed responses",
        best_for=("explanations", "descriptions", "feedback", "comments"),
        signals=("describe", "explain", "tell us", "detail", "elaborate", "comments", "feedback", "why"),
    ),
    # ── Choices ──────────────────────────────────────────────────────
    "multiple-choice": FieldTypeDescriptor(
        category="Choices",
        description="Radio buttons for a single selection from 2-6 options",
        best_for=("single selection from few options", "quiz questions"),
        signals=("choose one", "select one", "which", "pick one", "prefer"),
        is_choice=True,
        requires_options=True,
    ),
    "dropdown": FieldTypeDescriptor(
        category="Choices",
        description="Compact dropdown menu for a single selection from many options",
        best_for=("long option lists", "countries", "categories"),
        signals=("select from", "choose from list", "country", "state", "category"),
        optimal_when_option_count_above=6,
        is_choice=True,
        requires_options=True,
    ),
    "switch": FieldTypeDescriptor(
        category="Choices",
        description="Toggle for yes/no or on/off binary choices",
        best_for=("yes/no questions", "agreements", "attendance"),
        signals=("yes or no", "will you", "are you", "do you", "agree", "accept", "confirm", "subscribe"),
    ),
    "checkboxes": FieldTypeDescriptor(
        category="Choices",
        description="Checkboxes allowing multiple selections",
        best_for=("select all that apply", "interests", "preferences"),
        signals=("select all", "check all", "multiple", "all that apply", "interests"),
        allows_multiple=True,
        is_choice=True,
        requires_options=True,
    ),
    "multiselect": FieldTypeDescriptor(
        category="Choices",
        description="Compact multi-select dropdown",
        best_for=("multiple selections from long lists", "tags"),
        signals=("select multiple", "choose several", "tags", "categories"),
        allows_multiple=True,
        optimal_when_option_count_above=6,
        is_choice=True,
        requires_options=True,
    ),
    "picture-choice": FieldTypeDescriptor(
        category="Choices",
        description="Visual selection between images",
        best_for=("visual preferences", "product or style selection"),
        signals=("choose design", "select style", "which looks", "pick image"),
        requires_options=True,
    ),
    "choice-matrix": FieldTypeDescriptor(
        category="Choices",
        description="Grid for rating several items on the same scale",
        best_for=("rating multiple items", "survey grids"),
        signals=("rate each", "for each", "matrix", "grid"),
    ),
    # ── Rating & ranking ─────────────────────────────────────────────
    "star-rating": FieldTypeDescriptor(
        category="Rating",
        description="1-5 star visual rating",
        best_for=("satisfaction ratings", "quality ratings", "experience ratings"),
        signals=("rate", "rating", "stars", "how satisfied", "quality", "out of 5"),
    ),
    "opinion-scale": FieldTypeDescriptor(
        category="Rating",
        description="Numeric scale with labeled endpoints (Likert, NPS)",
        best_for=("likert scales", "nps", "agreement scales", "likelihood"),
        signals=("agree/disagree", "likely", "scale of", "recommend", "nps", "0-10", "strongly"),
    ),
    "slider": FieldTypeDescriptor(
        category="Rating",
        description="Continuous range slider",
        best_for=("budget ranges", "percentages", "continuous values"),
        signals=("range", "between", "percentage", "how much", "budget range"),
    ),
    "ranking": FieldTypeDescriptor(
        category="Rating",
        description="Drag-and-drop ordering of items",
        best_for=("prioritization", "preference ordering"),
        signals=("rank", "order", "prioritize", "most to least", "arrange"),
        requires_options=True,
    ),
    # ── Contact ──────────────────────────────────────────────────────
    "email": FieldTypeDescriptor(
        category="Contact",
        description="Email input with format validation",
        best_for=("email addresses",),
        signals=("email", "e-mail", "email address"),
    ),
    "phone": FieldTypeDescriptor(
        category="Contact",
        description="Phone number with formatting",
        best_for=("phone numbers",),
        signals=("phone", "telephone", "mobile", "cell", "contact number"),
    ),
    "address": FieldTypeDescriptor(
        category="Contact",
        description="Full address with autocomplete",
        best_for=("mailing addresses", "shipping addresses"),
        signals=("address", "where do you live", "street", "mailing", "shipping"),
    ),
    # ── Date & time ──────────────────────────────────────────────────
    "date-picker": FieldTypeDescriptor(
        category="Date & Time",
        description="Calendar date selector",
        best_for=("a specific date",),
        signals=("date", "when", "birthday", "deadline", "what day"),
    ),
    "time-picker": FieldTypeDescriptor(
        category="Date & Time",
        description="Time selector",
        best_for=("a specific time",),
        signals=("time", "what time", "hour", "preferred time"),
    ),
    "datetime-picker": FieldTypeDescriptor(
        category="Date & Time",
        description="Combined date and time selector",
        best_for=("appointments", "scheduling"),
        signals=("date and time", "schedule", "appointment"),
    ),
    "date-range": FieldTypeDescriptor(
        category="Date & Time",
        description="Start and end date selector",
        best_for=("availability periods", "durations"),
        signals=("from...to", "between dates", "availability", "start and end", "period"),
    ),
    # ── Numbers ──────────────────────────────────────────────────────
    "number": FieldTypeDescriptor(
        category="Number",
        description="Numeric input",
        best_for=("age", "quantity", "counts"),
        signals=("how many", "quantity", "age", "number of", "count", "years"),
    ),
    "currency": FieldTypeDescriptor(
        category="Number",
        description="Monetary amount with currency formatting",
        best_for=("prices", "budgets", "donations"),
        signals=("price", "cost", "budget", "salary", "donate", "pay", "money"),
    ),
    # ── Files ────────────────────────────────────────────────────────
    "file-uploader": FieldTypeDescriptor(
        category="Files",
        description="File upload interface",
        best_for=("documents", "images", "resumes"),
        signals=("upload", "attach", "resume", "cv", "document", "photo", "file"),
    ),
    # ── Display (non-input) ──────────────────────────────────────────
    "heading": FieldTypeDescriptor(
        category="Display",
        description="Section header",
        best_for=("section titles",),
        is_input=False,
    ),
    "paragraph": FieldTypeDescriptor(
        category="Display",
        description="Explanatory text block",
        best_for=("instructions", "descriptions"),
        is_input=False,
    ),
    "divider": FieldTypeDescriptor(
        category="Display",
        description="Visual separator line",
        best_for=("separating sections",),
        is_input=False,
    ),
}

# Names models commonly emit instead of registry keys
_ALIASES: dict[str, str] = {
    "text": "short-answer",
    "short-text": "short-answer",
    "shorttext": "short-answer",
    "input": "short-answer",
    "string": "short-answer",
    "textarea": "long-answer",
    "long-text": "long-answer",
    "paragraph-text": "long-answer",
    "radio": "multiple-choice",
    "choice": "multiple-choice",
    "single-choice": "multiple-choice",
    "mcq": "multiple-choice",
    "select": "dropdown",
    "checkbox": "checkboxes",
    "multi-select": "multiselect",
    "toggle": "switch",
    "boolean": "switch",
    "yes-no": "switch",
    "rating": "star-rating",
    "stars": "star-rating",
    "likert": "opinion-scale",
    "nps": "opinion-scale",
    "scale": "opinion-scale",
    "range": "slider",
    "rank": "ranking",
    "tel": "phone",
    "telephone": "phone",
    "date": "date-picker",
    "time": "time-picker",
    "datetime": "datetime-picker",
    "integer": "number",
    "money": "currency",
    "file": "file-uploader",
    "upload": "file-uploader",
    "matrix": "choice-matrix",
}


class FieldTypeRegistry:
    """Read-only mapping of field type name → :class:`FieldTypeDescriptor`."""

    def __init__(
        self,
        types: Mapping[str, FieldTypeDescriptor],
        aliases: Mapping[str, str] | None = None,
    ) -> None:
        self._types = MappingProxyType(dict(types))
        self._aliases = MappingProxyType(dict(aliases or {}))
        unknown = [target for target in self._aliases.values() if target not in self._types]
        if unknown:
            raise ValueError(f"Aliases point at unknown field types: {sorted(set(unknown))}")

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def get(self, name: str) -> FieldTypeDescriptor:
        """Return the descriptor for ``name``. Raises ``KeyError`` if unknown."""
        return self._types[name]

    def resolve(self, name: str | None) -> Optional[str]:
        """Map a model-suggested type name to a registry key, or None if unknown."""
        if not name:
            return None
        key = name.strip().lower().replace("_", "-").replace(" ", "-")
        if key in self._types:
            return key
        return self._aliases.get(key)

    def choice_types(self) -> list[str]:
        """Types usable for graded answers: selection from an explicit option list."""
        return [name for name, d in self._types.items() if d.is_choice]

    def input_types(self) -> list[str]:
        return [name for name, d in self._types.items() if d.is_input]

    def is_choice(self, name: str) -> bool:
        return name in self._types and self._types[name].is_choice

    def build_reference(self, *, include_display: bool = False) -> str:
        """Render the catalog as prompt guidance, grouped by category."""
        categories: dict[str, list[str]] = {}
        for name, desc in self._types.items():
            if not desc.is_input and not include_display:
                continue
            line = f'  - "{name}": {desc.description}'
            if desc.signals:
                line += f" | Signals: {', '.join(desc.signals)}"
            if desc.best_for:
                line += f" | Best for: {', '.join(desc.best_for)}"
            if desc.optimal_when_option_count_above is not None:
                line += f" | Prefer when more than {desc.optimal_when_option_count_above} options"
            categories.setdefault(desc.category, []).append(line)

        parts = ["AVAILABLE FIELD TYPES (use these EXACT type names):"]
        for category, lines in categories.items():
            parts.append(f"\n### {category}")
            parts.extend(lines)
        return "\n".join(parts)


@lru_cache(maxsize=1)
def default_registry() -> FieldTypeRegistry:
    """The process-wide registry, built once."""
    return FieldTypeRegistry(_PALETTE, _ALIASES)
