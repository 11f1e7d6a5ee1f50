"""
kvlog plugins: format encoders, sinks, filters and backend adapters.

Every plugin is a Logger decorator or a byte sink; they compose by explicit
delegation, each wrapper holding a reference to the logger it wraps.
"""
