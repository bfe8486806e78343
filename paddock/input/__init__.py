"""Input processing: key normalization, per-screen grammars, validation and the
single entry point (`UnifiedInputHandler`) every raw input passes through.
"""
