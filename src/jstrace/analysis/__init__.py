"""Analysis modules for jstrace.

``locations`` assigns statement, branch and function ids to a typed AST;
``instrumentationmap`` holds the resulting immutable map.
"""
