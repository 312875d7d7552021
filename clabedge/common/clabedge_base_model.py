from pydantic import BaseModel, ConfigDict


def underscore_to_hyphen(field_name: str) -> str:
    """
    Alias generator that takes the field name and converts the underscore into hyphen
    Args:
        field_name: string that contains the name of the field to be processed

    Returns: the alias name with no underscores

    """
    return field_name.replace("_", "-")


class ClabEdgeBaseModel(BaseModel):
    """
    Base data structure for providing a common configuration for all data structures.
    """
    model_config = ConfigDict(populate_by_name=True,
                              use_enum_values=True,
                              arbitrary_types_allowed=True,
                              validate_assignment=True,
                              alias_generator=underscore_to_hyphen,
                              protected_namespaces=())

    def dict(self, exclude_none: bool = True, **kwargs):
        return super().model_dump(exclude_none=exclude_none, **kwargs)


class ClabEdgeStaticModel(ClabEdgeBaseModel):
    """
    Immutable data structure. Used for the static hardware tables, which are built once and then only replaced
    as a whole.
    """
    model_config = ConfigDict(frozen=True)
