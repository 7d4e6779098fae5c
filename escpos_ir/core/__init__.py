"""Core codec modules: control codes, builder, converter.

WHY: The core package holds the only protocol-aware logic in the
project. Everything outside core (CLI, transport, image preview) just
moves text or bytes around without deciding what they mean.

HOW: commands.py defines the mnemonic table, builder.py emits IR text,
converter.py parses IR text into bytes, text.py transliterates literal
strings to the printer's code page, errors.py holds the exception types.

RULES:
- commands.py has no dependencies; everything else may import it
- Builder and converter never mutate the control-code table
- No module in core opens files or sockets; callers own sources and sinks
"""
