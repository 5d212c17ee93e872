"""
Library code of the global metadata decoder: a positioned reader over byte buffers, the logging
and configuration environment, and the `il2cppmeta.lib.metadata` decoder itself.
"""
