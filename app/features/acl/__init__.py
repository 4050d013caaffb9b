"""
Access control list feature module.

Per-resource grants on panels and views, the viewer < editor < owner lattice,
view-to-panel inheritance and the tenant-wide public grant.
"""
