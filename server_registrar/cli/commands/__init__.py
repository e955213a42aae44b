"""
Обработчики команд CLI.

- register.py: регистрация сервера в NetBox
"""

from .register import cmd_register, _print_register_summary

__all__ = ["cmd_register", "_print_register_summary"]
