"""board/ -- Companies and job postings for Jobboard.

Layer rule: board/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/.
"""
