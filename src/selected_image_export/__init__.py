"""selected-image-export 套件。"""

__version__ = "0.1.0"
