"""
Blood Type Compatibility Helper
Determines which donor blood types can donate to which recipient blood types
"""
from collections import namedtuple
from enum import Enum
from types import MappingProxyType

from algorithms.exceptions import InvalidBloodType


class BloodType(str, Enum):
    O_NEG = 'O-'
    O_POS = 'O+'
    A_NEG = 'A-'
    A_POS = 'A+'
    B_NEG = 'B-'
    B_POS = 'B+'
    AB_NEG = 'AB-'
    AB_POS = 'AB+'
    UNKNOWN = 'Unknown'

    def __str__(self):
        return self.value

    @property
    def is_canonical(self):
        return self is not BloodType.UNKNOWN

    @property
    def abo_group(self):
        """ABO part of the code ('O', 'A', 'B', 'AB'), None for Unknown"""
        if not self.is_canonical:
            return None
        return self.value[:-1]

    @classmethod
    def canonical(cls):
        """The 8 donatable blood types, in table order"""
        return [member for member in cls if member.is_canonical]

    @classmethod
    def parse(cls, value):
        """
        Convert a code into a BloodType.

        Accepts BloodType members, the 8 canonical codes, 'Unknown' and the
        legacy spellings used by older signup forms.

        Raises:
            InvalidBloodType: if the code is not recognized
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            code = value.strip()
            if code in UNKNOWN_ALIASES:
                return cls.UNKNOWN
            try:
                return cls(code)
            except ValueError:
                pass
        raise InvalidBloodType(value)


UNKNOWN_ALIASES = frozenset({'Unknown', 'unknown', "I don't know my blood type"})

BLOOD_TYPE_CHOICES = [(t.value, t.value) for t in BloodType]

_O_NEG, _O_POS = BloodType.O_NEG, BloodType.O_POS
_A_NEG, _A_POS = BloodType.A_NEG, BloodType.A_POS
_B_NEG, _B_POS = BloodType.B_NEG, BloodType.B_POS
_AB_NEG, _AB_POS = BloodType.AB_NEG, BloodType.AB_POS

# Blood type compatibility matrix (donor -> recipients)
COMPATIBILITY = MappingProxyType({
    _O_NEG: frozenset(BloodType.canonical()),  # Universal donor
    _O_POS: frozenset({_O_POS, _A_POS, _B_POS, _AB_POS}),
    _A_NEG: frozenset({_A_NEG, _A_POS, _AB_NEG, _AB_POS}),
    _A_POS: frozenset({_A_POS, _AB_POS}),
    _B_NEG: frozenset({_B_NEG, _B_POS, _AB_NEG, _AB_POS}),
    _B_POS: frozenset({_B_POS, _AB_POS}),
    _AB_NEG: frozenset({_AB_NEG, _AB_POS}),
    _AB_POS: frozenset({_AB_POS}),
})

# Receive-from view, always derived from COMPATIBILITY
RECEIVES_FROM = MappingProxyType({
    recipient: frozenset(donor for donor, recipients in COMPATIBILITY.items() if recipient in recipients)
    for recipient in BloodType.canonical()
})

ABO_GROUPS = frozenset({'O', 'A', 'B', 'AB'})


class DonorClass(str, Enum):
    UNIVERSAL = 'Universal'
    COMMON = 'Common'
    SELECTIVE = 'Selective'
    RARE = 'Rare'


class ReceiverClass(str, Enum):
    UNIVERSAL = 'Universal'
    COMMON = 'Common'
    LIMITED = 'Limited'
    SELECTIVE = 'Selective'


BloodTypeClass = namedtuple('BloodTypeClass', ['donor_class', 'receiver_class'])


def _lookup(table, blood_type):
    blood_type = BloodType.parse(blood_type)
    if not blood_type.is_canonical:
        return frozenset()
    return table[blood_type]


def can_donate_to(blood_type):
    """
    Blood types that can receive from `blood_type`.

    Returns an empty set for Unknown.

    Raises:
        InvalidBloodType: for codes outside the 8 canonical types
    """
    return _lookup(COMPATIBILITY, blood_type)


def can_receive_from(blood_type):
    """Blood types that can donate to `blood_type` (dual of can_donate_to)"""
    return _lookup(RECEIVES_FROM, blood_type)


def _groups(types):
    return {t.abo_group for t in types}


def _donor_class(recipients):
    if len(recipients) == len(COMPATIBILITY):
        return DonorClass.UNIVERSAL
    groups = _groups(recipients)
    if groups == ABO_GROUPS:
        return DonorClass.COMMON
    if groups == {'AB'}:
        return DonorClass.RARE
    return DonorClass.SELECTIVE


def _receiver_class(donors):
    if len(donors) == len(RECEIVES_FROM):
        return ReceiverClass.UNIVERSAL
    if len(donors) <= 2:
        return ReceiverClass.LIMITED
    if _groups(donors) == ABO_GROUPS:
        return ReceiverClass.SELECTIVE
    return ReceiverClass.COMMON


def classify(blood_type):
    """
    Classify a blood type on the donor and receiver side.

    The classes follow from the compatibility sets:
    - Universal: compatible with all 8 types
    - Common donor: reaches every ABO group (O+)
    - Rare donor: only reaches AB recipients
    - Limited receiver: receives from two types or fewer
    - Selective receiver: receives from every ABO group but one Rh factor

    Returns:
        BloodTypeClass, or None for Unknown
    """
    blood_type = BloodType.parse(blood_type)
    if not blood_type.is_canonical:
        return None
    return BloodTypeClass(
        donor_class=_donor_class(COMPATIBILITY[blood_type]),
        receiver_class=_receiver_class(RECEIVES_FROM[blood_type]),
    )


def _ordered(types):
    return [t.value for t in BloodType.canonical() if t in types]


def is_compatible(donor_blood_type, recipient_blood_type):
    """
    Check if donor blood type is compatible with recipient

    Args:
        donor_blood_type: Donor's blood type (e.g., 'O+')
        recipient_blood_type: Recipient's blood type (e.g., 'A+')

    Returns:
        Boolean: True if compatible, False otherwise (always False for Unknown)
    """
    recipient = BloodType.parse(recipient_blood_type)
    return recipient in can_donate_to(donor_blood_type)


def get_compatible_donors(recipient_blood_type):
    """
    Get list of blood types that can donate to recipient

    Args:
        recipient_blood_type: Recipient's blood type

    Returns:
        List of compatible donor blood type codes
    """
    return _ordered(can_receive_from(recipient_blood_type))


def get_compatible_recipients(donor_blood_type):
    """
    Get list of blood types that can receive from donor

    Args:
        donor_blood_type: Donor's blood type

    Returns:
        List of compatible recipient blood type codes
    """
    return _ordered(can_donate_to(donor_blood_type))


def compatibility_info(blood_type):
    """Both directions plus the class labels, ready for display"""
    blood_type = BloodType.parse(blood_type)
    classes = classify(blood_type)
    return {
        'blood_type': blood_type.value,
        'can_donate_to': get_compatible_recipients(blood_type),
        'can_receive_from': get_compatible_donors(blood_type),
        'donor_type': f"{classes.donor_class.value} Donor" if classes else None,
        'receiver_type': f"{classes.receiver_class.value} Receiver" if classes else None,
    }
