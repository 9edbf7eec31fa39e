# -*- coding: utf-8 -*-
"""Calorie tracker backend: meal logging, AI nutrition estimates, daily/weekly summaries."""
