'''
   Copyright (c) 2024 Yogesh Khatri 

   This file is part of mac_apt (macOS Artifact Parsing Tool).
   Usage or distribution of this software/code is subject to the 
   terms of the MIT License.
   
'''

#
#  Log setup for programs using this package on their own. Inside mac_apt
#  the MAIN logger is already configured and this is not needed.
#

import construct
import logging
import sys

def CreateLogger(log_file_path=None, log_file_level=logging.DEBUG, log_console_level=logging.INFO):
    '''Creates the logging classes for both console & file (if log_file_path is given)'''
    logger = logging.getLogger('MAIN')
    logger.setLevel(min(log_file_level, log_console_level) if log_file_path else log_console_level)

    if log_file_path:
        # Log file setting
        log_file_handler = logging.FileHandler(log_file_path, encoding='utf8')
        log_file_format  = logging.Formatter('%(asctime)s|%(name)s|%(levelname)s|%(message)s', datefmt='%Y-%m-%d %H:%M:%S')
        log_file_handler.setFormatter(log_file_format)
        log_file_handler.setLevel(log_file_level)
        logger.addHandler(log_file_handler)

    # console handler
    log_console_handler = logging.StreamHandler()
    log_console_handler.setLevel(log_console_level)
    log_console_format  = logging.Formatter('%(name)s-%(levelname)s-%(message)s')
    log_console_handler.setFormatter(log_console_format)
    logger.addHandler(log_console_handler)
    return logger

def LogLibraryVersions(log):
    '''Log the versions of libraries used'''
    log.info('Python version = {}'.format(sys.version))
    log.info('Construct version = {}'.format(construct.__version__))
