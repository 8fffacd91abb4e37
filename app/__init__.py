"""
Internship Placement Platform
Administration backend for a placement office.

Architecture:
- PostgreSQL: students, companies, jobs, applications, internships and more
- Repositories: parameterized SQL per entity
- Transition engine: status workflows and their side effects in one transaction
"""

__version__ = "1.0.0"
