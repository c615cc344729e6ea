"""
Inquiry Model

Enrollment inquiries submitted from the public site. Append-only: the
site creates them and lists them, never edits or removes them.
"""

from dataclasses import dataclass
from datetime import datetime, timezone


# Offered tracks, in the order shown on the enrollment form
PROGRAM_CLASSES = (
    'Class 8th-10th Foundation',
    'Class 11th-12th (Science)',
    'JEE/NEET Repeater',
)


class InquiryValidationError(ValueError):
    """Submitted inquiry form is missing a required field."""


@dataclass(frozen=True)
class Inquiry:
    """A single enrollment inquiry"""
    name: str
    program: str
    phone: str
    timestamp: str
    id: str = None

    @classmethod
    def from_document(cls, doc_id, data):
        return cls(
            id=doc_id,
            name=str(data.get('name') or ''),
            program=str(data.get('class') or ''),
            phone=str(data.get('phone') or ''),
            timestamp=str(data.get('timestamp') or ''),
        )

    def to_dict(self):
        """Stored shape (without the store-assigned id)."""
        return {
            'name': self.name,
            'class': self.program,
            'phone': self.phone,
            'timestamp': self.timestamp,
        }

    @property
    def submitted_at(self):
        return parse_timestamp(self.timestamp)

    def __repr__(self):
        return f'<Inquiry {self.name} ({self.program})>'


def iso_timestamp(now=None):
    """UTC ISO-8601 timestamp with millisecond precision and a 'Z' suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f'{now.microsecond // 1000:03d}Z'


def parse_timestamp(value):
    """Parse an ISO-8601 timestamp into an aware datetime, or None."""
    if not value:
        return None
    text = str(value).strip()
    if text.endswith('Z') or text.endswith('z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_inquiry(name, program, phone, now=None):
    """Validate a submitted enrollment form and build an Inquiry.

    Args:
        name: Student name (required)
        program: One of PROGRAM_CLASSES
        phone: Mobile number (required)
        now: Creation instant (default: current UTC time)

    Raises:
        InquiryValidationError: if a required field is blank or the
            program is not one of the offered tracks
    """
    name = (name or '').strip()
    phone = (phone or '').strip()
    program = (program or '').strip()

    if not name:
        raise InquiryValidationError('Please enter the student name.')
    if not phone:
        raise InquiryValidationError('Please enter a mobile number.')
    if program not in PROGRAM_CLASSES:
        raise InquiryValidationError('Please select a valid class.')

    return Inquiry(name=name, program=program, phone=phone, timestamp=iso_timestamp(now))


def sort_recent(inquiries):
    """Most recent first; records with unparseable timestamps go last."""
    dated = [iq for iq in inquiries if iq.submitted_at is not None]
    undated = [iq for iq in inquiries if iq.submitted_at is None]
    dated.sort(key=lambda iq: iq.submitted_at, reverse=True)
    return dated + undated
