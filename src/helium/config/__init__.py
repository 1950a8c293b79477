"""
Widget-set model, its persisted encoding, and the preferences media.
"""
