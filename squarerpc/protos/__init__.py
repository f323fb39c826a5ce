#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generated protocol buffer and gRPC modules for the square.v1 schema.

Regenerate with ``make protos`` (requires the ``build`` extra).

Author: Silan Hu (silan.hu@u.nus.edu)
"""
