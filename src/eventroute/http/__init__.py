from eventroute.http.ingress import create_ingress

__all__ = ["create_ingress"]
