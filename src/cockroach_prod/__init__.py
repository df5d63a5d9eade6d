"""cockroach-prod.

Provision and manage CockroachDB nodes on AWS and Google Compute Engine through docker-machine.
"""

__version__ = "0.1.0"
__author__ = "The Cockroach Authors"
__license__ = "Apache-2.0"
