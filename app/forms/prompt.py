from __future__ import annotations

import json
from dataclasses import asdict

from app.forms.records import ContactDetails


def build_form_fill_prompt(*, document_text: str, contact: ContactDetails) -> str:
    """
    Build the single user prompt asking the model to fill the benefits document.

    The document text is interpolated verbatim (no escaping), so a document can carry
    instructions of its own. Contact details are rendered as indented JSON in
    name/email/phone order.
    """

    contact_json = json.dumps(asdict(contact), indent=2, ensure_ascii=False)
    return "\n".join(
        [
            "Here is the content of a government benefits document:",
            document_text,
            "Please fill in the following details accurately:",
            contact_json,
            "Return the completed form content clearly structured as plain text.",
        ]
    )
