"""
Backend-agnostic contracts: devices, errors, tensor and bridge interfaces,
operator records.
"""
