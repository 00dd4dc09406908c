"""stylegen.core: foundation layer.

Contains the value model, literal emitter, unique-resource collector,
palette subsystem, icon atlas compositor and the source generator.
This module has NO dependencies on stylegen.modifiers or stylegen.registry;
modifier lookup is passed in by the caller.
Only stdlib, numpy, and PIL are allowed here.
"""
