"""Domain layer for timemaster.

Pure models, errors, events and transition functions. Nothing in this
package performs I/O.
"""
