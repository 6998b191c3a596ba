"""compdown: declarative motion-graphics documents.

Folders, files, compositions and layers are declared in YAML (or JSON),
validated with line-numbered errors, and handed to a host materializer.
Documents read back from a host are pruned to a minimal form.
"""
