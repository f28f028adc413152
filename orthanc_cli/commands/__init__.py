"""Click command groups registered on the ``orthanc`` root command."""
