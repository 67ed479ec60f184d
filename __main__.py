"""Pulumi entry point for netkit infrastructure."""
import logging

import structlog

from netkit_infra.__main__ import NetkitStack
from netkit_infra.config import StackConfig

structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.INFO))
NetkitStack(config=StackConfig.load()).run()
