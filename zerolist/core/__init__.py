#!/usr/bin/env python

"""
    Core module for zerolist: persistence, signup workflow, analytics,
    rate limiting and outbound side effects

    :copyright: (c) 2025 by AUTHORS
    :license: see LICENSE for more details
"""
