"""
DVMWall Test Suite

Tests organized by:
- test_velocity_space.py: Discrete velocity catalog
- test_classifier.py: Direction classification against face normals
- test_moments.py: Flux moments over direction subsets
- test_wall_density.py: Zero-net-mass-flux closure
- test_maxwell_field.py: Diffuse wall evaluation
- test_mapping.py: auto_map / rmap under topology changes
- test_patch_fields.py: Specular and fixed-gradient variants, selector
- test_config.py: YAML configuration
- test_diagnostics.py: Flux balance and convergence tracking
- test_performance.py: Throughput gate
"""
