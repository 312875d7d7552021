from pathlib import Path

import toml
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClabEdgeBaseSettings(BaseSettings):
    model_config = SettingsConfigDict(arbitrary_types_allowed=True,
                                      populate_by_name=True)

    @classmethod
    def from_toml(cls, config_file: str | Path):
        """
        Builds the settings from a TOML file. Environment variables still apply to the fields the file does not set.
        """
        if isinstance(config_file, str):
            config_file = Path(config_file)

        if not config_file.exists() or not config_file.is_file():
            raise FileNotFoundError(f'File {config_file}')

        with config_file.open('r') as f:
            config_dict = toml.loads(f.read())
            return cls(**config_dict)
