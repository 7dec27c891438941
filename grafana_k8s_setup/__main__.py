import sys

from grafana_k8s_setup.cli import main

sys.exit(main())
