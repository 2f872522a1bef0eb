from .loader import DEFAULT_CONFIG_PATH, PipelineConfig, load_config

__all__ = ["DEFAULT_CONFIG_PATH", "PipelineConfig", "load_config"]
