"""
Wayback URL Extractor

A utility for listing every URL the Internet Archive's Wayback Machine has
recorded for a domain, with the capture date of each entry and a short
summary of hosts and file types found.
"""

__version__ = "1.0"
__author__ = "Wayback URL Extractor Project"
__description__ = "Wayback Machine URL Extractor"
