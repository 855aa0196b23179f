"""
Dynamic DNS provider detection.

DDNS zones are legitimate services but are frequently abused for malware
command-and-control and phishing because the address behind a name can be
changed at will. Detection is informational and does not affect the NRD
verdict.
"""

from .models import DDNSInfo


DDNS_PROVIDERS: dict[str, str] = {
    # No-IP
    "no-ip.com": "No-IP",
    "no-ip.org": "No-IP",
    "no-ip.biz": "No-IP",
    "noip.com": "No-IP",
    "ddns.net": "No-IP",
    "serveftp.com": "No-IP",
    "servequake.com": "No-IP",
    "sytes.net": "No-IP",
    "zapto.org": "No-IP",
    "hopto.org": "No-IP",
    "redirectme.net": "No-IP",
    "bounceme.net": "No-IP",
    "myftp.biz": "No-IP",
    "myftp.org": "No-IP",
    "myvnc.com": "No-IP",
    "serveblog.net": "No-IP",
    "servebeer.com": "No-IP",
    "servegame.com": "No-IP",
    "servehttp.com": "No-IP",
    "serveirc.com": "No-IP",
    "servepics.com": "No-IP",
    # DuckDNS
    "duckdns.org": "DuckDNS",
    # DynDNS
    "dyndns.org": "DynDNS",
    "dyndns.biz": "DynDNS",
    "dyndns.info": "DynDNS",
    "dynalias.com": "DynDNS",
    "dynalias.net": "DynDNS",
    "homeip.net": "DynDNS",
    "homelinux.com": "DynDNS",
    "homelinux.net": "DynDNS",
    "homeunix.com": "DynDNS",
    "dnsalias.com": "DynDNS",
    "dnsalias.net": "DynDNS",
    "dnsdojo.com": "DynDNS",
    "is-a-geek.com": "DynDNS",
    "is-a-geek.net": "DynDNS",
    # Dynu
    "dynu.com": "Dynu",
    "dynu.net": "Dynu",
    "freeddns.org": "Dynu",
    "mywire.org": "Dynu",
    "webredirect.org": "Dynu",
    "myddns.rocks": "Dynu",
    # FreeDNS (afraid.org)
    "afraid.org": "FreeDNS",
    "chickenkiller.com": "FreeDNS",
    "crabdance.com": "FreeDNS",
    "ignorelist.com": "FreeDNS",
    "jumpingcrab.com": "FreeDNS",
    "mooo.com": "FreeDNS",
    "strangled.net": "FreeDNS",
    "us.to": "FreeDNS",
    # ChangeIP
    "changeip.com": "ChangeIP",
    "changeip.net": "ChangeIP",
    "changeip.org": "ChangeIP",
    "dns04.com": "ChangeIP",
    "dns05.com": "ChangeIP",
    "onmypc.net": "ChangeIP",
    # DNS Exit
    "dnsexit.com": "DNS Exit",
    "linkpc.net": "DNS Exit",
    "publicvm.com": "DNS Exit",
    # Regional and vendor services
    "ydns.eu": "YDNS",
    "nsupdate.info": "nsupdate.info",
    "spdns.de": "Securepoint",
    "spdns.eu": "Securepoint",
    "gotdns.ch": "Other",
    "kozow.com": "Other",
    "loseyourip.com": "Other",
    "ooguy.com": "Other",
    "theworkpc.com": "Other",
    "synology.me": "Synology",
    "diskstation.me": "Synology",
    "dscloud.me": "Synology",
    "myds.me": "Synology",
    "quickconnect.to": "Synology",
    "myqnapcloud.com": "QNAP",
    # Tunnels with the same abuse pattern
    "trycloudflare.com": "Cloudflare",
    "ngrok.io": "ngrok",
    "ngrok-free.app": "ngrok",
    "ngrok.app": "ngrok",
}


def check_ddns(domain: str) -> DDNSInfo:
    """
    Check whether a domain is, or sits under, a known DDNS provider zone.

    Args:
        domain: Domain name in any case, with or without a trailing dot

    Returns:
        DDNSInfo naming the provider and the matched zone, if any
    """
    candidate = domain.strip().lower().rstrip(".")
    labels = candidate.split(".")

    # Walk from the full name towards the TLD so the longest zone wins
    for start in range(len(labels) - 1):
        zone = ".".join(labels[start:])
        provider = DDNS_PROVIDERS.get(zone)
        if provider is not None:
            return DDNSInfo(is_ddns=True, provider=provider, matched_domain=zone)

    return DDNSInfo(is_ddns=False)


def get_ddns_provider_names() -> list[str]:
    """Get the sorted list of distinct provider names."""
    return sorted(set(DDNS_PROVIDERS.values()))
