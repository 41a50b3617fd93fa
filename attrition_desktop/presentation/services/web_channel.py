import json
import logging
from concurrent.futures import Future
from PySide6.QtCore import QFile, QIODevice, QObject, Signal, Slot
from PySide6.QtWebEngineCore import QWebEngineScript

from attrition_desktop.livery_core.application.core_facade import CoreFacade
from attrition_desktop.presentation.viewmodels.ipc_bridge import IpcBridge, failure

logger = logging.getLogger(__name__)

BRIDGE_OBJECT_NAME = "attrition"
QWEBCHANNEL_JS = ":/qtwebchannel/qwebchannel.js"

# Promise-based invoke() on top of QWebChannel, plus _blank link interception.
# window.electron mirrors the shape the platform's pages already call into.
BRIDGE_JS = """
(function () {
  'use strict';
  if (window.attrition) { return; }

  var pending = {};
  var counter = 0;
  var ready = new Promise(function (resolve) {
    new QWebChannel(qt.webChannelTransport, function (channel) {
      var bridge = channel.objects.attrition;
      bridge.responseReady.connect(function (requestId, payload) {
        var resolveRequest = pending[requestId];
        if (!resolveRequest) { return; }
        delete pending[requestId];
        resolveRequest(JSON.parse(payload));
      });
      resolve(bridge);
    });
  });

  function invoke(channel) {
    var args = Array.prototype.slice.call(arguments, 1);
    return ready.then(function (bridge) {
      return new Promise(function (resolve) {
        var requestId = String(++counter);
        pending[requestId] = resolve;
        bridge.invoke(requestId, channel, JSON.stringify(args));
      });
    });
  }

  window.attrition = {
    invoke: invoke,
    resetConfig: function () { return invoke('reset-config'); },
    saveMinimizeToTrayPreference: function (shouldMinimize) {
      return invoke('save-minimize-to-tray-preference', shouldMinimize);
    }
  };
  window.electron = {
    ipcRenderer: { invoke: invoke },
    resetConfig: window.attrition.resetConfig,
    saveMinimizeToTrayPreference: window.attrition.saveMinimizeToTrayPreference
  };

  document.addEventListener('click', function (event) {
    var link = event.target && event.target.closest ? event.target.closest('a') : null;
    if (link && link.target === '_blank' && link.href) {
      event.preventDefault();
      invoke('link-clicked', link.href);
    }
  }, true);
})();
"""


def _read_qwebchannel_js() -> str:
    qfile = QFile(QWEBCHANNEL_JS)
    if not qfile.open(QIODevice.ReadOnly):
        raise RuntimeError(f"Cannot open {QWEBCHANNEL_JS}: {qfile.errorString()}")
    try:
        return bytes(qfile.readAll()).decode("utf-8")
    finally:
        qfile.close()


def build_bridge_scripts() -> list:
    """
    Scripts injected into every page: Qt's qwebchannel.js followed by the bridge shim.
    """
    scripts = []
    for name, source in (("qwebchannel", _read_qwebchannel_js()), ("attrition-bridge", BRIDGE_JS)):
        script = QWebEngineScript()
        script.setName(name)
        script.setSourceCode(source)
        script.setInjectionPoint(QWebEngineScript.InjectionPoint.DocumentCreation)
        script.setWorldId(QWebEngineScript.ScriptWorldId.MainWorld)
        script.setRunsOnSubFrames(False)
        scripts.append(script)
    return scripts


class WebChannelTransport(QObject):
    """
    QWebChannel object the page talks to.

    Each request carries an id; the answer is delivered through responseReady
    with the same id once the handler finished, on whichever thread it ran.
    """

    responseReady = Signal(str, str)
    _completed = Signal(str, str)

    def __init__(self, bridge: IpcBridge, core: CoreFacade, parent: QObject = None):
        super().__init__(parent)
        self._bridge = bridge
        self._core = core
        # Queued when emitted from the core loop thread
        self._completed.connect(self.responseReady)

    @Slot(str, str, str)
    def invoke(self, request_id: str, channel: str, args_json: str) -> None:
        try:
            args = json.loads(args_json or "[]")
        except ValueError as e:
            self._respond(request_id, failure(f"Invalid arguments: {e}"))
            return
        if not isinstance(args, list):
            args = [args]

        if not self._bridge.is_async(channel):
            self._respond(request_id, self._bridge.invoke(channel, args))
            return

        try:
            future = self._core.submit(self._bridge.invoke_async(channel, args))
        except RuntimeError as e:
            self._respond(request_id, failure(str(e)))
            return
        future.add_done_callback(lambda f, rid=request_id: self._completed.emit(rid, self._encode(self._outcome(f))))

    def _respond(self, request_id: str, result) -> None:
        self.responseReady.emit(request_id, self._encode(result))

    @staticmethod
    def _outcome(future: Future):
        if future.cancelled():
            return failure("Request was cancelled")
        error = future.exception()
        if error is not None:
            logger.error("Async IPC request failed: %s", error)
            return failure(str(error) or type(error).__name__)
        return future.result()

    @staticmethod
    def _encode(result) -> str:
        try:
            return json.dumps(result)
        except (TypeError, ValueError) as e:
            logger.error("IPC result is not serializable: %s", e)
            return json.dumps(failure(f"Result is not serializable: {e}"))
