"""Parsing and applying workflow commands emitted by running steps."""