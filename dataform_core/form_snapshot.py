"""
Form snapshot - reads the current state of a form's controls.

The snapshot is taken from the live controls every time instead of relying on
a data binding, because values changed programmatically (not by keystrokes)
must be observed too.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .diagnostics import get_logger

logger = get_logger(__name__)


@dataclass
class FormControl:
    """One form element as seen by the snapshot."""
    name: str = ""
    type: str = "text"
    value: Any = ""
    checked: bool = False
    tag_name: str = "INPUT"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormControl":
        return cls(
            name=data.get("name") or "",
            type=(data.get("type") or "text").lower(),
            value=data.get("value", ""),
            checked=bool(data.get("checked")),
            tag_name=(data.get("tag_name") or data.get("tagName") or "INPUT").upper(),
        )


@dataclass
class Form:
    """Ordered controls of a form."""
    elements: List[FormControl] = field(default_factory=list)


def _is_ignored(control: FormControl) -> bool:
    if not control.name:
        return True
    return control.type in ("submit", "button") or control.tag_name == "BUTTON"


def get_form_data(form: Form) -> Dict[str, Any]:
    """
    Return the data entered in a form, keyed by control name.

    - checkboxes accumulate into {value: checked} per name
    - radios contribute their value only when checked
    - any other control contributes its value, overwriting earlier ones
    """
    form_data: Dict[str, Any] = {}

    for control in form.elements:
        if _is_ignored(control):
            continue

        if control.type == "checkbox":
            options = form_data.get(control.name)
            if not isinstance(options, dict):
                options = form_data[control.name] = {}
            options[control.value] = bool(control.checked)
        elif control.type == "radio":
            if control.checked:
                form_data[control.name] = control.value
        else:
            form_data[control.name] = control.value

    return form_data


def has_elements(form: Optional[Form]) -> bool:
    return bool(form is not None and getattr(form, "elements", None) is not None)


# JS returning the live state of every control inside the form
READ_FORM_JS = """
(selector) => {
    const form = document.querySelector(selector);
    if (!form || !form.elements) return null;
    return Array.from(form.elements).map(el => ({
        name: el.name || '',
        type: (el.type || '').toLowerCase(),
        value: el.value === undefined ? '' : el.value,
        checked: !!el.checked,
        tag_name: el.tagName
    }));
}
"""


async def read_form(page, selector: str = "form") -> Form:
    """Read the live controls of a form from a Playwright page."""
    controls = await page.evaluate(READ_FORM_JS, selector)
    if controls is None:
        logger.debug(f"No form found for selector {selector!r}")
        return Form()
    return Form(elements=[FormControl.from_dict(c) for c in controls])
