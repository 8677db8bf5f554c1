"""
Service layer: storage backends, dashboard and selection persistence,
lazy dataset management and the analysis session.
"""
