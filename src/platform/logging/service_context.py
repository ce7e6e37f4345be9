"""
Service context for log lines: which service, which environment, which process.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'shopping-cart')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')
    # HOSTNAME is the pod/container name when running in a cluster
    instance = os.getenv('HOSTNAME') or str(os.getpid())
    return f'{service_name}@{deploy_env}:{instance[:12]}'
