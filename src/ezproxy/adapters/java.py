"""JVM adapters: Gradle system properties, Maven settings.xml proxies, cacerts import."""

from __future__ import annotations

import os
import subprocess
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable
from urllib.parse import urlsplit

from ezproxy.adapters._marker import MarkerFileAdapter
from ezproxy.adapters._structured import write_text
from ezproxy.adapters.base import CONFIGURED, NO_CERT, NOT_CONFIGURED, STALE, AdapterError
from ezproxy.core.context import ExecutionContext
from ezproxy.core.privileged import shell_quote
from ezproxy.core.schema import Settings
from ezproxy.utils.detect import OSInfo, command_available, home_dir


def parse_proxy_url(url: str) -> tuple[str, str]:
    """Split a proxy URL into (host, port), defaulting the port from the scheme."""
    try:
        parts = urlsplit(url)
        host = parts.hostname or ""
        port = parts.port
    except ValueError:
        return url, "8080"
    if port is None:
        return host, "443" if parts.scheme == "https" else "80"
    return host, str(port)


def to_java_non_proxy_hosts(no_proxy: str) -> str:
    """Convert a comma-separated NO_PROXY list to Java's pipe-separated form.

    This is lossy on purpose: ``.corp.com`` becomes ``*.corp.com`` and CIDR
    entries such as ``10.0.0.0/8`` are dropped, because nonProxyHosts only
    understands host globs.
    """
    hosts = []
    for entry in no_proxy.split(","):
        entry = entry.strip()
        if not entry or "/" in entry:
            continue
        if entry.startswith("."):
            entry = "*" + entry
        hosts.append(entry)
    return "|".join(hosts)


# -- Gradle --


class GradleAdapter(MarkerFileAdapter):
    name = "gradle"
    commands = ("gradle",)

    def default_path(self) -> Path:
        return home_dir() / ".gradle" / "gradle.properties"

    def render(self, settings: Settings) -> str:
        http_host, http_port = parse_proxy_url(settings.proxy.http)
        https_host, https_port = parse_proxy_url(settings.proxy.https)
        non_proxy = to_java_non_proxy_hosts(settings.proxy.no_proxy)
        lines = [
            f"systemProp.http.proxyHost={http_host}",
            f"systemProp.http.proxyPort={http_port}",
            f"systemProp.http.nonProxyHosts={non_proxy}",
            f"systemProp.https.proxyHost={https_host}",
            f"systemProp.https.proxyPort={https_port}",
            f"systemProp.https.nonProxyHosts={non_proxy}",
        ]
        return "\n".join(lines) + "\n"


# -- Maven --

MAVEN_NS = "http://maven.apache.org/SETTINGS/1.0.0"
PROXY_ID_PREFIX = "ezproxy-"


def _ns(root: ET.Element) -> str:
    if root.tag.startswith("{"):
        return root.tag[1:].partition("}")[0]
    return ""


def _q(ns: str, tag: str) -> str:
    return f"{{{ns}}}{tag}" if ns else tag


class MavenAdapter:
    """Own the ``ezproxy-http``/``ezproxy-https`` entries under <proxies>.

    User proxies and every other element of settings.xml are kept.
    """

    name = "maven"

    def __init__(self, settings_path: Path | None = None) -> None:
        self._settings_path = settings_path

    @property
    def settings_path(self) -> Path:
        return self._settings_path or home_dir() / ".m2" / "settings.xml"

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("mvn")

    def wanted(self, settings: Settings) -> list[dict[str, str]]:
        non_proxy = to_java_non_proxy_hosts(settings.proxy.no_proxy)
        entries = []
        for protocol, url in (("http", settings.proxy.http), ("https", settings.proxy.https)):
            host, port = parse_proxy_url(url)
            entry = {
                "id": PROXY_ID_PREFIX + protocol,
                "active": "true",
                "protocol": protocol,
                "host": host,
                "port": port,
            }
            if non_proxy:
                entry["nonProxyHosts"] = non_proxy
            entries.append(entry)
        return entries

    def _load(self) -> ET.ElementTree | None:
        path = self.settings_path
        if not path.is_file():
            return None
        parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
        try:
            return ET.parse(path, parser=parser)
        except ET.ParseError as e:
            raise AdapterError(f"{path} is not valid XML: {e}") from e

    def _dump(self, tree: ET.ElementTree) -> str:
        ns = _ns(tree.getroot())
        if ns:
            ET.register_namespace("", ns)
        ET.indent(tree, space="  ")
        body = ET.tostring(tree.getroot(), encoding="unicode")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"

    @staticmethod
    def _ours(proxies: ET.Element, ns: str) -> list[ET.Element]:
        found = []
        for proxy in proxies.findall(_q(ns, "proxy")):
            proxy_id = proxy.findtext(_q(ns, "id"), default="").strip()
            if proxy_id.startswith(PROXY_ID_PREFIX):
                found.append(proxy)
        return found

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        tree = self._load()
        if tree is None:
            tree = ET.ElementTree(ET.Element(_q(MAVEN_NS, "settings")))
        root = tree.getroot()
        ns = _ns(root)

        proxies = root.find(_q(ns, "proxies"))
        if proxies is None:
            proxies = ET.SubElement(root, _q(ns, "proxies"))
        for proxy in self._ours(proxies, ns):
            proxies.remove(proxy)

        for entry in self.wanted(settings):
            proxy = ET.SubElement(proxies, _q(ns, "proxy"))
            for key, value in entry.items():
                ET.SubElement(proxy, _q(ns, key)).text = value

        write_text(self.settings_path, self._dump(tree), ctx, "Would merge into")

    def remove(self, ctx: ExecutionContext) -> None:
        tree = self._load()
        if tree is None:
            return
        root = tree.getroot()
        ns = _ns(root)
        proxies = root.find(_q(ns, "proxies"))
        if proxies is None:
            return
        ours = self._ours(proxies, ns)
        if not ours:
            return
        for proxy in ours:
            proxies.remove(proxy)
        if not len(proxies):
            root.remove(proxies)
        write_text(self.settings_path, self._dump(tree), ctx, "Would remove ezproxy proxies from")

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        tree = self._load()
        if tree is None:
            return NOT_CONFIGURED
        root = tree.getroot()
        ns = _ns(root)
        proxies = root.find(_q(ns, "proxies"))
        if proxies is None:
            return NOT_CONFIGURED
        ours = self._ours(proxies, ns)
        if not ours:
            return NOT_CONFIGURED
        current = [
            {child.tag.rpartition("}")[2]: (child.text or "").strip() for child in proxy}
            for proxy in ours
        ]
        return CONFIGURED if current == self.wanted(settings) else STALE


# -- JVM trust store --

JAVA_CA_ALIAS = "ezproxy-corp-ca"
STOREPASS = "changeit"

CACERTS_CANDIDATES = (
    # Homebrew OpenJDK
    "/opt/homebrew/opt/openjdk/libexec/openjdk.jdk/Contents/Home/lib/security/cacerts",
    "/usr/local/opt/openjdk/libexec/openjdk.jdk/Contents/Home/lib/security/cacerts",
    # Linux distro-managed stores
    "/etc/pki/java/cacerts",
    "/etc/ssl/certs/java/cacerts",
)
MACOS_JVM_DIR = "/Library/Java/JavaVirtualMachines"


def _java_home_from_java() -> str:
    try:
        out = subprocess.run(
            ["java", "-XshowSettings:property", "-version"],
            capture_output=True,
            text=True,
        )
    except OSError:
        return ""
    for line in (out.stderr + out.stdout).splitlines():
        if "java.home" in line and "=" in line:
            return line.split("=", 1)[1].strip()
    return ""


def find_java_cacerts() -> Path | None:
    """Locate the JVM cacerts keystore: JAVA_HOME, known paths, then ask java."""
    java_home = os.environ.get("JAVA_HOME")
    if java_home:
        for rel in ("lib/security/cacerts", "jre/lib/security/cacerts"):
            candidate = Path(java_home) / rel
            if candidate.is_file():
                return candidate

    for c in CACERTS_CANDIDATES:
        if Path(c).is_file():
            return Path(c)

    jvm_dir = Path(MACOS_JVM_DIR)
    if jvm_dir.is_dir():
        for jdk in sorted(jvm_dir.iterdir()):
            candidate = jdk / "Contents" / "Home" / "lib" / "security" / "cacerts"
            if candidate.is_file():
                return candidate

    home = _java_home_from_java()
    if home:
        candidate = Path(home) / "lib" / "security" / "cacerts"
        if candidate.is_file():
            return candidate
    return None


class JavaCAAdapter:
    name = "java_ca"

    def __init__(
        self,
        cacerts: Path | None = None,
        lister: Callable[..., subprocess.CompletedProcess] | None = None,
    ) -> None:
        self._cacerts = cacerts
        self._lister = lister or subprocess.run

    def cacerts(self) -> Path | None:
        return self._cacerts or find_java_cacerts()

    def is_available(self, os_info: OSInfo) -> bool:
        return command_available("keytool")

    def is_imported(self, cacerts: Path) -> bool:
        try:
            out = self._lister(
                ["keytool", "-list", "-alias", JAVA_CA_ALIAS, "-keystore", str(cacerts), "-storepass", STOREPASS],
                capture_output=True,
                text=True,
            )
        except OSError:
            return False
        return out.returncode == 0 and JAVA_CA_ALIAS in (out.stdout or "")

    def apply(self, settings: Settings, ctx: ExecutionContext) -> None:
        cert = settings.ca_cert_path
        if not cert:
            return
        if not Path(cert).is_file():
            raise AdapterError(f"cert file not found: {cert}")

        cacerts = self.cacerts()
        if cacerts is None:
            ctx.note("  Could not locate JVM cacerts keystore. Set JAVA_HOME and retry.")
            return
        if not ctx.dry_run and self.is_imported(cacerts):
            ctx.note(f"  CA cert already in JVM trust store ({cacerts})")
            return

        cmd = (
            f"keytool -importcert -alias {JAVA_CA_ALIAS} -file {shell_quote(cert)} "
            f"-keystore {shell_quote(str(cacerts))} -storepass {STOREPASS} -noprompt"
        )
        ctx.gateway.run(self.name, [cmd])

    def remove(self, ctx: ExecutionContext) -> None:
        cacerts = self.cacerts()
        if cacerts is None or not self.is_imported(cacerts):
            return
        cmd = (
            f"keytool -delete -alias {JAVA_CA_ALIAS} "
            f"-keystore {shell_quote(str(cacerts))} -storepass {STOREPASS} -noprompt"
        )
        ctx.gateway.run_best_effort(self.name, [cmd])

    def status(self, settings: Settings, ctx: ExecutionContext) -> str:
        if not settings.ca_cert_path:
            return NO_CERT
        cacerts = self.cacerts()
        if cacerts is None:
            return "JVM cacerts not found"
        return CONFIGURED if self.is_imported(cacerts) else NOT_CONFIGURED
