"""REST transport (:mod:`.client`), authentication (:mod:`.auth`) and the
typed :class:`~orthanc_cli.api.orthanc.OrthancClient` façade."""
