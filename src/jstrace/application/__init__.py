"""
jstrace application layer.

This package holds what a caller of the instrumenter deals with:

1. **Entry points** (`instrumenter.py`): `Instrumenter` with its synchronous,
   callback and batch forms.
2. **Configuration** (`config.py`): `InstrumenterOptions`.
3. **Wrapping policy** (`wrapping.py`): whether a mainline `return` is legal.
4. **Errors** (`errors.py`): the exception hierarchy.
"""
