"""
Vocabulary Validator

Checks extracted filter candidates against the values that actually exist in
the action data, and replaces each accepted candidate with the vocabulary's
own spelling ("cyber security" -> "Cyber Security").

Rules:
- No list for a field: the raw candidate is accepted
- Status, risk level, audit name, audit lead, C-level: exact match after
  normalization. C-level also accepts an exact e-mail.
- Responsible: an e-mail must be in the list as-is. A name is matched against
  the list's e-mails (the e-mail contains the name, or the name contains the
  e-mail's local part).
- Rejected candidates are dropped, never reported as errors
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

from auditbot.core.text_normalizer import normalize

logger = logging.getLogger(__name__)


@dataclass
class AvailableOptions:
    """Known values per field, used only for validation. None means "no list"."""
    statuses: Optional[List[str]] = None
    audit_names: Optional[List[str]] = None
    audit_leads: Optional[List[str]] = None
    risk_levels: Optional[List[str]] = None
    responsible_emails: Optional[List[str]] = None
    c_levels: Optional[List[str]] = None

    _KEYS = {
        "statuses": "statuses",
        "auditNames": "audit_names",
        "auditLeads": "audit_leads",
        "riskLevels": "risk_levels",
        "responsibleEmails": "responsible_emails",
        "cLevels": "c_levels",
    }

    def to_dict(self) -> Dict[str, List[str]]:
        """Convert to the camelCase mapping, omitting fields without a list."""
        result = {}
        for key, attr in self._KEYS.items():
            values = getattr(self, attr)
            if values is not None:
                result[key] = list(values)
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AvailableOptions":
        """Build from a mapping with camelCase or snake_case keys."""
        if not data:
            return cls()
        kwargs = {}
        for key, attr in cls._KEYS.items():
            values = data.get(key, data.get(attr))
            if values is not None:
                kwargs[attr] = [str(v) for v in values]
        return cls(**kwargs)


class VocabularyValidator:
    """
    Validates candidates against AvailableOptions.

    Usage:
        validator = VocabularyValidator(options)
        validator.validate_status("open")        # "Open" if the list has it
        validator.validate_responsible("Jane")   # "jane.doe@corp.com"
    """

    def __init__(self, options: Optional[AvailableOptions] = None):
        self.options = options or AvailableOptions()

    @staticmethod
    def _exact(candidate: str, values: Optional[List[str]]) -> Optional[str]:
        if values is None:
            return candidate
        target = normalize(candidate)
        for value in values:
            if normalize(value) == target:
                return value
        return None

    def validate_status(self, candidate: str) -> Optional[str]:
        return self._exact(candidate, self.options.statuses)

    def validate_risk_level(self, candidate: str) -> Optional[str]:
        return self._exact(candidate, self.options.risk_levels)

    def validate_audit_name(self, candidate: str) -> Optional[str]:
        return self._exact(candidate, self.options.audit_names)

    def validate_audit_lead(self, candidate: str) -> Optional[str]:
        return self._exact(candidate, self.options.audit_leads)

    def validate_c_level(self, candidate: str) -> Optional[str]:
        values = self.options.c_levels
        if values is None:
            return candidate
        matched = self._exact(candidate, values)
        if matched:
            return matched
        if "@" in candidate and candidate in values:
            return candidate
        return None

    def validate_responsible(self, candidate: str) -> Optional[str]:
        emails = self.options.responsible_emails
        if emails is None:
            return candidate

        if "@" in candidate:
            return candidate if candidate in emails else None

        name = normalize(candidate)
        # "Jane Doe" should also find "jane.doe@corp.com"
        dotted = name.replace(" ", ".")
        for email in emails:
            local_part = email.split("@")[0]
            if not local_part:
                continue
            normalized_email = normalize(email)
            if name in normalized_email or dotted in normalized_email:
                return email
            if normalize(local_part) in name:
                return email
        return None

    def validate(self, field_name: str, candidate: Optional[str]) -> Optional[str]:
        """
        Validate one candidate by ParsedFilters field name.

        Fields without a validation rule (auditYear) are accepted as given.
        """
        if not candidate:
            return None
        validator = {
            "status": self.validate_status,
            "riskLevel": self.validate_risk_level,
            "auditName": self.validate_audit_name,
            "auditLead": self.validate_audit_lead,
            "responsibleEmail": self.validate_responsible,
            "cLevel": self.validate_c_level,
        }.get(field_name)
        if validator is None:
            return candidate

        accepted = validator(candidate)
        if accepted is None:
            logger.debug(f"Dropped {field_name} candidate '{candidate}': not in available options")
        return accepted
