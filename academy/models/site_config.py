"""
Site Config Model

The singleton record holding all editable public-facing text.
"""

from dataclasses import dataclass


DEFAULT_DIRECTOR_MESSAGE = (
    "Our aim at 'The Impulse Academy' is to provide quality education "
    "to smaller cities like Giridih..."
)
DEFAULT_PHONE = '+91 97988 06907'
DEFAULT_ADDRESS = 'Sihodih Rd, Pandardih, Giridih, Jharkhand 815302'
DEFAULT_ADMISSION_STATUS = 'Admission Open 2025-26'

# Attribute name -> stored key
_STORED_KEYS = {
    'director_message': 'directorMessage',
    'phone': 'phone',
    'address': 'address',
    'admission_status': 'admissionStatus',
}

# Stored keys the admin content editor may change
EDITABLE_FIELDS = ('admissionStatus', 'directorMessage', 'phone')


@dataclass(frozen=True)
class SiteConfig:
    """Site configuration (admission headline, director message, contact)"""
    director_message: str = DEFAULT_DIRECTOR_MESSAGE
    phone: str = DEFAULT_PHONE
    address: str = DEFAULT_ADDRESS
    admission_status: str = DEFAULT_ADMISSION_STATUS

    @classmethod
    def from_dict(cls, data):
        """Build from a stored record; missing keys keep their defaults."""
        kwargs = {}
        for attr, key in _STORED_KEYS.items():
            value = data.get(key)
            if value is not None:
                kwargs[attr] = str(value)
        return cls(**kwargs)

    def to_dict(self):
        return {key: getattr(self, attr) for attr, key in _STORED_KEYS.items()}

    def __repr__(self):
        return f'<SiteConfig {self.admission_status!r}>'


def editable_changes(form):
    """Pick the editable fields present in a submitted form."""
    return {key: form[key] for key in EDITABLE_FIELDS if key in form}
