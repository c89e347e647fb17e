"""Command line tool for ingress-sync.

```
usage: ingress-sync [-h] [--log-level {DEBUG,INFO,WARNING,ERROR,CRITICAL}] {validate} ...

Command line utility for validating gateway objects.

positional arguments:
  {validate}            Command
    validate            Run the admission validator for an object against local manifests
```
"""
