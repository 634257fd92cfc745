from sqlmigrate.utils import logging, module_loader, text

__all__ = ("logging", "module_loader", "text")
