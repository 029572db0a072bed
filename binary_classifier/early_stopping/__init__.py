from .EarlyStopping import EarlyStopping, save_if_improved

__all__ = ["EarlyStopping", "save_if_improved"]
