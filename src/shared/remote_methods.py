# Identifiers of the remote methods and events exchanged with UI callers
REQUEST_SERVER_START = "JupyterServerFactory-requestserverstart"
REQUEST_SERVER_START_PATH = "JupyterServerFactory-requestserverstartpath"
REQUEST_SERVER_STOP = "JupyterServerFactory-requestserverstop"

PATH_SELECTED_EVENT = "JupyterServerFactory-pathselectedevent"
SERVER_ERROR_EVENT = "JupyterServerFactory-servererrorevent"
