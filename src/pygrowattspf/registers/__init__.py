"""Register maps and the codec for Growatt SPF inverters.

- fields: FieldRule / RegisterWindow building blocks
- codec: pure decode/encode between words and values
- sensors: read-only input registers and the holding-register clock
- profiles: firmware-specific control domain layouts
"""

from pygrowattspf.registers.codec import decode, decode_all, encode, encode_words
from pygrowattspf.registers.fields import (
    FieldKind,
    FieldRule,
    RegisterSpace,
    RegisterWindow,
    contiguous_blocks,
)
from pygrowattspf.registers.profiles import (
    EXTENDED_PROFILE,
    PACKED_PROFILE,
    PROFILES,
    SCALED_PROFILE,
    TOU_CHARGING,
    TOU_DISCHARGING,
    ControlDomain,
    DeviceProfile,
    ProfileName,
    get_profile,
)
from pygrowattspf.registers.sensors import (
    CLOCK_FIELDS,
    SENSOR_READ_GROUPS,
    SPF_DERIVED_SENSORS,
    SPF_SENSOR_FIELDS,
)

__all__ = [
    # Building blocks
    "FieldKind",
    "FieldRule",
    "RegisterSpace",
    "RegisterWindow",
    "contiguous_blocks",
    # Codec
    "decode",
    "decode_all",
    "encode",
    "encode_words",
    # Sensors
    "CLOCK_FIELDS",
    "SENSOR_READ_GROUPS",
    "SPF_DERIVED_SENSORS",
    "SPF_SENSOR_FIELDS",
    # Profiles
    "EXTENDED_PROFILE",
    "PACKED_PROFILE",
    "PROFILES",
    "SCALED_PROFILE",
    "TOU_CHARGING",
    "TOU_DISCHARGING",
    "ControlDomain",
    "DeviceProfile",
    "ProfileName",
    "get_profile",
]
