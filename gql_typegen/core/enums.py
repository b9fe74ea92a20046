"""Open-world enum generation.

Every generated enum carries an ``Other`` variant for values the schema did
not declare when the code was generated, so a server adding an enum value
never breaks an older client.
"""

from .ir import GeneratedEnum, GeneratedEnumVariant
from .naming import safe_name
from .schema import EnumType

OTHER_VARIANT = "Other"


def generate_enum(enum: EnumType) -> GeneratedEnum:
    variants = [
        GeneratedEnumVariant(
            wire_name=value.name,
            name=safe_name(value.name),
            description=value.description,
        )
        for value in enum.values
    ]
    return GeneratedEnum(
        name=enum.name,
        variants=variants,
        other_variant=OTHER_VARIANT,
        description=enum.description,
    )
