"""
Помощник службы поддержки портала DTS Gilgit-Baltistan.

Содержит:
- knowledge/ - обход сайта и база знаний (JSON-документ на диске)
- cli.py - команды для ручного запуска обновления и проверки здоровья
"""

__version__ = '0.1.0'
