from .store import LevelStore, LevelStoreError, default_save_dir

__all__ = ["LevelStore", "LevelStoreError", "default_save_dir"]
