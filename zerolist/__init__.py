#!/usr/bin/env python

"""
    zerolist, the self-hosted waitlist service

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""

__version__ = '0.1.0'
