"""Tests for the ingress-sync command line tool."""
