"""Tokenizer, parser and WHERE evaluation for a small SQL-like query language."""